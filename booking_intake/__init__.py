"""Booking intake backend for a home cleaning business"""
