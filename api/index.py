from mangum import Mangum
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from faucet.api import create_app
from faucet.config import configure_logging


configure_logging()

app = create_app(root_path="/api")

handler = Mangum(app)
