"""FirefoxKit CLI command implementations."""
