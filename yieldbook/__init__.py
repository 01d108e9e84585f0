"""Yieldbook investments service."""
