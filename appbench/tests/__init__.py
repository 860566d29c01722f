'''
App Benchmark Test Suite

Test Modules:
-------------
- test_evaluator.py: Percent difference, metric comparison, threshold rules,
  submission validation, determinism
- test_reference_data.py: Built-in table lookups, immutability, JSON loading
- test_email_report.py: Report rendering and SMTP delivery with mocked smtplib
- test_rate_limit.py: Sliding-window limiter
- test_api.py: HTTP contract through TestClient (success, errors, snapshot,
  background email, rate limiting)

Run:
    pytest appbench/tests
'''
