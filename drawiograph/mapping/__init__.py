"""Style and shape kind mapping"""
