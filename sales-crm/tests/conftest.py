"""
Pytest configuration for sales CRM tests.

This file adds the parent directory to the Python path so that tests
can import from the domain, services, repositories and api modules.
"""

import sys
from pathlib import Path

# Add the sales-crm directory to the Python path
# so tests can import domain, services, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
