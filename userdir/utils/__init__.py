"""Shared helpers: errors, results and logging"""
