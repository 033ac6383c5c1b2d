"""
orgscope: reporting lines and visibility for multi-tenant teams
"""
