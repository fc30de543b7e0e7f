"""Record storage and the text layouts of calendar records."""
