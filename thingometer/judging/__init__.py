"""Judging core: running-order allocation, score writes and aggregation"""
