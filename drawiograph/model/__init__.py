"""In-memory diagram model"""
