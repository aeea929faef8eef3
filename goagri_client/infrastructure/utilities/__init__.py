"""Shared infrastructure utilities"""
