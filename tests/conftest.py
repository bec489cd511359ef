import os, sys
from pathlib import Path

# Add src/ to sys.path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

# Required settings for like_labeler.config.Core
os.environ.setdefault("LABELER_DID", "did:plc:testlabeler")
os.environ.setdefault("LABELER_IDENTIFIER", "labeler.test")
os.environ.setdefault("LABELER_PASSWORD", "test-password")
