"""
Record models and the default SMK item normalizer.
"""
