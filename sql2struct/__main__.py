#!/usr/bin/env python3
"""
Enable running the package directly:
    python -m sql2struct -s schema.sql -p UserInfoPO -e UserInfo
"""
from .cli import main
import sys

if __name__ == '__main__':
    sys.exit(main())
