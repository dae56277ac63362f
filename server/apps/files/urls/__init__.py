"""URL modules of the files app, one per API area."""
