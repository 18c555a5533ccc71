"""EduMagic lesson app: outbound AI-provider gateway and its HTTP surface."""

__version__ = "1.0.0"
