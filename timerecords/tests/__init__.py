"""
Tests Module: Unit and Integration Tests

Test Coverage:
    - Records, intervals and the origin epoch
    - TimeSeries container, mutation and views
    - Boundary search (bisection and hinted walk)
    - Interpolation, strict interpolation and merge
    - Integration, averages, accumulation and extrema
    - Stream collector windows and dispatch
    - Configuration and logging
"""
