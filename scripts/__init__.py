"""Runnable MuJoCo simulations and their shared tick loop."""
