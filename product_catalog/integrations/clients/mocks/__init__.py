"""
Mock integration clients.

Return fake (but realistic) responses without calling any external API.
They follow the SAME interface as the real HTTP clients.
"""
