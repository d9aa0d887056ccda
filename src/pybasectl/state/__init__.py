"""State layer.

The shared context, the session state tracker that derives control
authority from status frames, and the receiver that feeds it.
"""
