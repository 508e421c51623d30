import sys

from auto_backport.main import main

sys.exit(main())
