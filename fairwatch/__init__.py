"""
FAIRWATCH - Bias Assessment Engine.

Architecture:
    fairwatch/
    ├── core/          # Settings, exceptions, logging, metrics, encryption
    ├── governance/    # Assessment components and the engine
    └── storage/       # Sample provider / result store protocols and implementations
"""

__version__ = "2025.1.0"
