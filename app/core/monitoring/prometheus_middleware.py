from prometheus_client import Counter, Histogram, Gauge
from fastapi import Request
from fastapi.routing import APIRoute
import time
import logging

logger = logging.getLogger(__name__)

# ============================================================================
# HTTP Metrics
# ============================================================================

http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint'],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_requests_in_progress = Gauge(
    'http_requests_in_progress',
    'Number of HTTP requests in progress',
    ['method', 'endpoint']
)

# ============================================================================
# Production Workflow Metrics
# ============================================================================

# Child plans created by the cascade
plans_derived_total = Counter(
    'production_plans_derived_total',
    'Plans and reports created by the cascade',
    ['level']  # weekly, daily, report
)

# Derivations that found the child already present
plans_reused_total = Counter(
    'production_plans_reused_total',
    'Cascade lookups that reused an existing plan or report',
    ['level']
)

# Status transitions on plans and reports
plan_transitions_total = Counter(
    'production_plan_transitions_total',
    'Plan and report status transitions',
    ['level', 'status']  # pending, inProgress, completed, rejected
)

action_plans_created_total = Counter(
    'production_action_plans_created_total',
    'Corrective action plans recorded for under-target entries'
)

scheduler_runs_total = Counter(
    'production_scheduler_runs_total',
    'Scheduled monthly plan creation runs',
    ['outcome']  # created, skipped, failed
)

auth_attempts_total = Counter(
    'auth_attempts_total',
    'Total authentication attempts',
    ['status']  # success, failed
)

# ============================================================================
# Middleware Class
# ============================================================================

class PrometheusMiddleware:
    """
    FastAPI middleware to collect Prometheus metrics
    """

    async def __call__(self, request: Request, call_next):
        # Collapse concrete paths onto their route template (e.g. /api/production/daily/{plan_id})
        route = request.url.path
        for route_obj in request.app.routes:
            if isinstance(route_obj, APIRoute):
                match = route_obj.path_regex.match(route)
                if match:
                    route = route_obj.path
                    break

        method = request.method
        http_requests_in_progress.labels(method=method, endpoint=route).inc()
        start_time = time.time()

        try:
            response = await call_next(request)

            duration = time.time() - start_time
            http_requests_total.labels(
                method=method,
                endpoint=route,
                status_code=response.status_code
            ).inc()
            http_request_duration_seconds.labels(
                method=method,
                endpoint=route
            ).observe(duration)

            return response

        except Exception as e:
            http_requests_total.labels(
                method=method,
                endpoint=route,
                status_code=500
            ).inc()

            logger.error(f"Request failed: {str(e)}")
            raise

        finally:
            http_requests_in_progress.labels(method=method, endpoint=route).dec()


# ============================================================================
# Helper Functions for Application Metrics
# ============================================================================

def track_derivation(level: str, created: bool):
    """Track a cascade lookup-or-create"""
    if created:
        plans_derived_total.labels(level=level).inc()
    else:
        plans_reused_total.labels(level=level).inc()


def track_transition(level: str, status: str):
    """Track plan/report status transitions"""
    plan_transitions_total.labels(level=level, status=status).inc()


def track_action_plans(count: int):
    """Track action plans recorded for one report submission"""
    if count:
        action_plans_created_total.inc(count)


def track_scheduler_run(outcome: str):
    """Track scheduled monthly plan runs"""
    scheduler_runs_total.labels(outcome=outcome).inc()


def track_auth_attempt(success: bool):
    """Track authentication attempts"""
    status = "success" if success else "failed"
    auth_attempts_total.labels(status=status).inc()
