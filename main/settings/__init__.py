import os
import sys
from .base import *

RUNNING_PYTEST = 'pytest' in sys.modules or any('pytest' in arg for arg in sys.argv)

if RUNNING_PYTEST:
    from .test import *
elif os.environ.get('env') == 'prod':
    from .prod import *
elif os.path.exists(os.path.join(os.path.dirname(__file__), 'dev.py')):
    from .dev import *
