"""Utility modules for configuration loading"""
