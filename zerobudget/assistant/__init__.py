"""Tool-calling budget assistant.

The reasoning backend only ever sees the tool catalog in ``tools``; every
tool calls the same service functions as the HTTP controllers.
"""
