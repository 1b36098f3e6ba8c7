"""
controller/__init__.py

LQR synthesis pipeline and controllers.

This package provides:
- Finite-difference linearization of a plant
- CARE solution through the Hamiltonian's stable subspace
- Gain synthesis and the resynthesizing LQR controller
"""
