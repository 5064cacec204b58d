"""
bo-engine command line interface.
"""
