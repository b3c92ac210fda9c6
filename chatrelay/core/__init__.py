"""
Core relay components: sessions, NLU adapters, action dispatch and channels.
"""
