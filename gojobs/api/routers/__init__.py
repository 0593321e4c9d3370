"""API routers, one per area of the job board"""
