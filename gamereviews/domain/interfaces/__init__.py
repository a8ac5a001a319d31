"""Domain Interfaces (Ports):

Defines the contracts (Abstract Base Classes) that infrastructure components
must implement. Core services depend on these interfaces, not on concrete
implementations.
"""
