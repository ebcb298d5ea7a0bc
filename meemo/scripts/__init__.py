"""Administrative command line utilities."""
