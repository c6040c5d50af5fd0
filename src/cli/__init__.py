"""Command-line interface for the ChefORG store."""
