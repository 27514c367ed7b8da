"""Web server for settlernote."""
