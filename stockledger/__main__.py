import sys

from stockledger.cli import main

sys.exit(main())
