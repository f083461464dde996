"""Upload recently modified files from a local directory tree to S3."""
