import sys

from spanlab.app import main

sys.exit(main())
