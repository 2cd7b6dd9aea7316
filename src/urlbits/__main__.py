import sys

from urlbits.cli import main

sys.exit(main())
