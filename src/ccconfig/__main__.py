import sys

from ccconfig.cli import main

sys.exit(main())
