"""Label rendering, print transports, dispatch and the agent job queue."""
