import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from cli.campamento_cmd import campamento


def main():
    """Main entry point for the Campamento client."""
    campamento(prog_name="campamento")


if __name__ == "__main__":
    main()
