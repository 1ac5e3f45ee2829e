import sys

from abi_export.main import main

sys.exit(main())
