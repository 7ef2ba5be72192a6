"""
Test Factories for tmaxfit
==========================

- data_factory: synthetic temperature series, delimited and GHCN-Daily text
- sampler_factory: deterministic samplers standing in for NUTS
"""
