"""Pumping session store."""
