#!/usr/bin/env python3
"""
Neshama Yahrzeit API Server
Serves the yahrzeit calculator endpoints: Hebrew date lookup, yahrzeit
schedules, calendar (.ics) downloads and printable PDF schedules.
"""

from http.server import HTTPServer, BaseHTTPRequestHandler
import json
import os
import sys
from urllib.parse import urlparse, parse_qs
import logging

import time as _time_module

logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(message)s')

FRONTEND_DIR = os.path.dirname(os.path.abspath(__file__))
if FRONTEND_DIR not in sys.path:
    sys.path.insert(0, FRONTEND_DIR)

from yahrzeit_manager import YahrzeitManager

yahrzeit_mgr = YahrzeitManager()

# ── Rate Limiter ─────────────────────────────────────────
# Simple in-memory rate limiter for PDF generation.
# Keyed by (client_ip, endpoint). Allows max N calls per window.
_rate_limit_store = {}  # key -> list of timestamps
_RATE_LIMIT_WINDOW = 300   # 5 minutes
_RATE_LIMIT_MAX_CALLS = 10  # max 10 PDFs per 5 min per IP


def _check_rate_limit(client_ip, endpoint, max_calls=_RATE_LIMIT_MAX_CALLS, window=_RATE_LIMIT_WINDOW):
    """Return True if the request is within rate limits, False if exceeded."""
    key = (client_ip, endpoint)
    now = _time_module.time()
    timestamps = _rate_limit_store.get(key, [])
    # Prune old entries
    timestamps = [t for t in timestamps if now - t < window]
    if len(timestamps) >= max_calls:
        _rate_limit_store[key] = timestamps
        return False
    timestamps.append(now)
    _rate_limit_store[key] = timestamps
    return True


def _query_to_request(query):
    """Flatten a parsed query string into calculator input."""
    params = parse_qs(query)
    return {key: values[0] for key, values in params.items() if values}


class YahrzeitAPIHandler(BaseHTTPRequestHandler):

    def do_GET(self):
        """Handle GET requests"""
        _req_start = _time_module.time()
        parsed_path = urlparse(self.path)
        path = parsed_path.path

        # Health check endpoint (fast path)
        if path == '/api/health':
            self.send_json_response({'status': 'ok'})
            self._log_request('GET', path, 200, _req_start)
            return

        if path == '/api/hebrew-date':
            self.handle_hebrew_date(_query_to_request(parsed_path.query))
        elif path == '/api/hebrew-year':
            self.handle_hebrew_year(_query_to_request(parsed_path.query))
        elif path == '/api/yahrzeit/calculate':
            self.handle_calculate(_query_to_request(parsed_path.query))
        else:
            self.send_404()

    def do_POST(self):
        """Handle POST requests"""
        parsed_path = urlparse(self.path)
        path = parsed_path.path

        # Read request body
        content_length = int(self.headers.get('Content-Length', 0))
        body = self.rfile.read(content_length) if content_length > 0 else b''

        handlers = {
            '/api/yahrzeit/calculate': self.handle_calculate,
            '/api/yahrzeit/ics': self.handle_ics,
            '/api/yahrzeit/schedule.pdf': self.handle_schedule_pdf,
        }
        handler = handlers.get(path)
        if handler is None:
            self.send_404()
            return

        try:
            data = json.loads(body or b'{}')
        except json.JSONDecodeError:
            self.send_json_response({'status': 'error', 'message': 'Invalid JSON'}, 400)
            return
        if not isinstance(data, dict):
            self.send_json_response({'status': 'error', 'message': 'Expected a JSON object'}, 400)
            return
        handler(data)

    def do_OPTIONS(self):
        """Handle CORS preflight requests"""
        self.send_response(200)
        self.send_cors_headers()
        self.end_headers()

    def send_cors_headers(self):
        """Send CORS headers"""
        self.send_header('Access-Control-Allow-Origin', '*')
        self.send_header('Access-Control-Allow-Methods', 'GET, POST, OPTIONS')
        self.send_header('Access-Control-Allow-Headers', 'Content-Type')

    # ── API: Hebrew Calendar ─────────────────────────────────

    def handle_hebrew_date(self, data):
        """GET /api/hebrew-date?date=YYYY-MM-DD[&sunset=after]"""
        try:
            converted = yahrzeit_mgr.convert_to_hebrew_date(
                data.get('date', ''), data.get('sunset') or 'before'
            )
            if not converted:
                self.send_json_response({'status': 'error', 'message': 'Invalid date or sunset option'}, 400)
                return
            hebrew_str, month, day, year = converted
            self.send_json_response({
                'status': 'success',
                'date': data.get('date'),
                'hebrew_date': hebrew_str,
                'hebrew_month': month,
                'hebrew_day': day,
                'hebrew_year': year,
            })
        except Exception as e:
            self.send_error_response(str(e))

    def handle_hebrew_year(self, data):
        """GET /api/hebrew-year?year=5785"""
        try:
            result = yahrzeit_mgr.describe_year(data.get('year', ''))
            self.send_json_response(result, 200 if result['status'] == 'success' else 400)
        except Exception as e:
            self.send_error_response(str(e))

    # ── API: Yahrzeit ────────────────────────────────────────

    def handle_calculate(self, data):
        """Calculate yahrzeit dates from {date_of_death, sunset, years, name}"""
        try:
            result = yahrzeit_mgr.calculate(data)
            self.send_json_response(result, 200 if result['status'] == 'success' else 400)
        except Exception as e:
            self.send_error_response(str(e))

    def handle_ics(self, data):
        """Download an .ics file for the next yahrzeit (or all of them with all=true)"""
        try:
            if str(data.get('all', '')).lower() in ('1', 'true', 'yes'):
                exported = yahrzeit_mgr.build_full_ics(data)
            else:
                exported = yahrzeit_mgr.build_ics(data, cycle=data.get('cycle'))
            if not exported:
                self.send_json_response({'status': 'error', 'message': 'No yahrzeit to export for this input'}, 400)
                return
            filename, text = exported
            self.send_file_response(text.encode('utf-8'), 'text/calendar; charset=utf-8', filename)
        except Exception as e:
            self.send_error_response(str(e))

    def handle_schedule_pdf(self, data):
        """Download a printable PDF of the yahrzeit schedule"""
        if not _check_rate_limit(self._get_client_ip(), 'schedule_pdf'):
            self._send_rate_limit_error()
            return
        try:
            exported = yahrzeit_mgr.build_schedule_pdf(data)
            if not exported:
                self.send_json_response({'status': 'error', 'message': 'Could not build a schedule for this input'}, 400)
                return
            filename, pdf_bytes = exported
            self.send_file_response(pdf_bytes, 'application/pdf', filename)
        except Exception as e:
            self.send_error_response(str(e))

    # ── Helpers ──────────────────────────────────────────────

    def send_json_response(self, data, status=200):
        """Send JSON response"""
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        self.send_cors_headers()
        self.end_headers()
        response = json.dumps(data, ensure_ascii=False, indent=2)
        self.wfile.write(response.encode('utf-8'))

    def send_file_response(self, content, content_type, filename):
        """Send a downloadable attachment"""
        self.send_response(200)
        self.send_header('Content-Type', content_type)
        self.send_header('Content-Length', str(len(content)))
        self.send_header('Content-Disposition', f'attachment; filename="{filename}"')
        self.send_header('Cache-Control', 'no-cache, no-store, must-revalidate')
        self.send_cors_headers()
        self.end_headers()
        self.wfile.write(content)

    def send_error_response(self, message, status=500):
        """Send error response with friendly message for 500s"""
        if status >= 500:
            logging.error(f"[API] Server error: {message}")
            friendly = self._friendly_error(message)
        else:
            friendly = str(message)
        self.send_json_response({
            'status': 'error',
            'error': {'message': friendly}
        }, status)

    def send_404(self):
        """Send 404 response"""
        self.send_error_response('Endpoint not found', 404)

    def _log_request(self, method, path, status, start_time):
        """Log request with method, path, status code, and response time."""
        elapsed_ms = (_time_module.time() - start_time) * 1000
        logging.info(f"[API] {method} {path} {status} {elapsed_ms:.0f}ms")

    def _get_client_ip(self):
        """Get client IP from headers or socket."""
        forwarded = self.headers.get('X-Forwarded-For', '')
        if forwarded:
            return forwarded.split(',')[0].strip()
        return self.client_address[0] if self.client_address else '0.0.0.0'

    def _send_rate_limit_error(self):
        """Send a 429 Too Many Requests response."""
        self.send_json_response({
            'status': 'error',
            'message': 'Too many requests. Please wait a few minutes before trying again.'
        }, 429)

    def _friendly_error(self, raw_message):
        """Convert technical error messages to user-friendly text."""
        msg = str(raw_message)
        # Hide Python internals from users
        if 'traceback' in msg.lower() or 'attributeerror' in msg.lower() or 'typeerror' in msg.lower():
            return 'An unexpected error occurred. Please try again later.'
        if 'reportlab' in msg.lower():
            return 'The PDF could not be generated. Please try again later.'
        # Keep it short for other errors
        if len(msg) > 200:
            return 'An unexpected error occurred. Please try again later.'
        return msg

    def log_message(self, format, *args):
        """Custom logging"""
        logging.info(f"[API] {format % args}")


def run_server(port=None):
    """Start the API server"""
    if port is None:
        port = int(os.environ.get('PORT', 5000))
    server_address = ('0.0.0.0', port)
    httpd = HTTPServer(server_address, YahrzeitAPIHandler)

    logging.info(f"\n{'='*60}")
    logging.info(f" NESHAMA YAHRZEIT API")
    logging.info(f"{'='*60}")
    logging.info(f"\n Running on: http://0.0.0.0:{port}")
    logging.info(f" Timezone for 'today': {yahrzeit_mgr.timezone_name}")
    logging.info(f"\n API Endpoints:")
    logging.info(f" GET  /api/health - Service status")
    logging.info(f" GET  /api/hebrew-date?date=YYYY-MM-DD - Hebrew date of a day")
    logging.info(f" GET  /api/hebrew-year?year=5785 - Structure of a Hebrew year")
    logging.info(f" GET  /api/yahrzeit/calculate?date_of_death=... - Yahrzeit dates")
    logging.info(f" POST /api/yahrzeit/calculate - Yahrzeit dates")
    logging.info(f" POST /api/yahrzeit/ics - Calendar file download")
    logging.info(f" POST /api/yahrzeit/schedule.pdf - Printable schedule")
    logging.info(f"\n Press Ctrl+C to stop")
    logging.info(f"{'='*60}\n")

    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        logging.info("\n\n Server stopped")
        httpd.shutdown()


if __name__ == '__main__':
    run_server()
