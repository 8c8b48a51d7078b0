"""Template discovery: directory walking and role classification."""
