"""Services that fetch, cache and query job postings"""
