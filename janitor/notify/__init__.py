"""Owner notifications and run summary reporting."""
