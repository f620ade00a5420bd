"""Console front end for the voice chat client."""
