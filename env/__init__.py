"""
env/__init__.py

Plant package.

This package provides:
- The `Plant` interface and per-axis address table
- MuJoCo platform-pendulum backend
- Pure-JAX cart-pole dynamics with closed-form and autodiff Jacobians
- Closed-loop simulation with Diffrax integration
"""
