"""nutrichat -- conversational orchestration core for an AI nutrition coach."""

__version__ = '0.3.0'
