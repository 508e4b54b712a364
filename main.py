"""
SmartLend Deployer - Main Entry Point
Deploys the SmartLendProtocol contract and prints its address

Run: python main.py
"""

from deployer.runner import cli


if __name__ == "__main__":
    cli()
