"""Diagram document reading and writing"""
