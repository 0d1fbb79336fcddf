"""
E-Commerce Admin Reporting Service
"""
