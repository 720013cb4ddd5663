from prometheus_client import Counter, Histogram

HTTP_REQUESTS   = Counter("searchcore_http_requests_total", "HTTP requests issued", ["method", "outcome"])
HTTP_LATENCY    = Histogram("searchcore_http_request_seconds", "HTTP request latency", ["method"])
CIRCUIT_OPENS   = Counter("searchcore_circuit_opens_total", "Circuit breaker open transitions", ["service"])
TASK_POLLS      = Counter("searchcore_task_polls_total", "Task status fetches made while waiting")
TASK_WAITS      = Histogram("searchcore_task_wait_seconds", "Time spent waiting for tasks", ["outcome"])
TOKENS_ISSUED   = Counter("searchcore_tenant_tokens_total", "Tenant tokens generated")
