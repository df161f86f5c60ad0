#!/usr/bin/env python3
"""
Wrapper script to run the Gmail label forwarder
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent / 'src'
sys.path.insert(0, str(src_path))

from label_forwarder.main import main

if __name__ == '__main__':
    sys.exit(main())
