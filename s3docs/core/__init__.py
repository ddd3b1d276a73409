"""Configuration and error types shared across s3docs."""
