# api/index.py
# Vercel Python entry: the runtime serves the WSGI `app` object below.

import sys
from pathlib import Path

# Add project root to sys.path for Vercel
_root = str(Path(__file__).resolve().parents[1])
if _root not in sys.path:
    sys.path.insert(0, _root)

from backend.payment_server import create_app

app = create_app()
