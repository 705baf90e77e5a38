"""linqpadc - compile LINQPad scripts into runnable .NET projects."""

__version__ = "0.3.0"
