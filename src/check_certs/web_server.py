# src/check_certs/web_server.py

import argparse
import logging

from flask import Flask, current_app, jsonify, render_template_string, request

from check_certs.config import DEFAULT_TIMEOUT, CheckConfig, setup_logging
from check_certs.exceptions import ValidationError
from check_certs.tls_checker import CertChecker

logger = logging.getLogger(__name__)

HTML_TEMPLATE = """
<!doctype html>
<html lang='en'>
<head>
<meta charset='utf-8'>
<meta name='viewport' content='width=device-width, initial-scale=1'>
<link href='https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist/css/bootstrap.min.css' rel='stylesheet'>
<style>
    body { padding-top: 20px; background-color: #f8f9fa; }
    .container { max-width: 1140px; }
    .table td { word-break: break-word; vertical-align: top; }
</style>
<title>Certificate Check</title>
</head>
<body>
<div class='container'>
  <h1 class='mb-4'>Certificate Check</h1>
  <form method='post' class='mb-4'>
    <div class='mb-3'>
      <label for='domains' class='form-label'>Hosts (host or host:port, separated by spaces or commas)</label>
      <textarea class='form-control' id='domains' name='domains' rows='3'>{{ domains }}</textarea>
    </div>
    <div class='form-check form-check-inline'>
      <input class='form-check-input' type='checkbox' id='insecure' name='insecure' value='true' {% if insecure_checked %}checked{% endif %}>
      <label class='form-check-label' for='insecure'>Skip certificate verification (insecure)</label>
    </div>
    <div class='form-check form-check-inline'>
      <input class='form-check-input' type='checkbox' id='utc' name='utc' value='true' {% if utc_checked %}checked{% endif %}>
      <label class='form-check-label' for='utc'>Show times in UTC</label>
    </div>
    <div class='mt-3'><button type='submit' class='btn btn-primary'>Check</button></div>
  </form>
  {% if error %}<div class='alert alert-danger'>{{ error }}</div>{% endif %}
  {% if results %}
  <table class='table table-bordered table-sm'>
    <thead><tr>
      <th>Domain</th><th>IP</th><th>Issuer</th><th>Not Before</th><th>Not After</th>
      <th>CN</th><th>SANs</th><th>Public Key</th><th>Error</th>
    </tr></thead>
    <tbody>
    {% for cert in results %}
      <tr class='{{ "table-danger" if cert.error else "" }}'>
        <td>{{ cert.domain_name }}</td><td>{{ cert.ip }}</td><td>{{ cert.issuer }}</td>
        <td>{{ cert.not_before }}</td><td>{{ cert.not_after }}</td><td>{{ cert.common_name }}</td>
        <td>{% for san in cert.sans %}{{ san }}<br/>{% endfor %}</td>
        <td>{{ cert.public_key }}</td><td>{{ cert.error }}</td>
      </tr>
    {% endfor %}
    </tbody>
  </table>
  {% endif %}
</div>
</body>
</html>
"""


def _split_domains(raw: str):
    return [d.strip() for d in raw.replace(',', ' ').split() if d.strip()]


def _flag(value) -> bool:
    return str(value).lower() in ('1', 'true', 'yes', 'on')


def create_app(config: CheckConfig = None, checker: CertChecker = None) -> Flask:
    """
    Build the Flask app.

    All requests go through one CertChecker, so its slot limiter caps the
    number of handshakes across concurrent requests.
    """
    app = Flask(__name__)
    app.config['CHECK_CONFIG'] = config or CheckConfig()
    app.config['CERT_CHECKER'] = checker or CertChecker()

    def _request_config(insecure: bool, utc: bool) -> CheckConfig:
        base = current_app.config['CHECK_CONFIG']
        return CheckConfig(insecure=base.insecure or insecure, utc=base.utc or utc,
                           timeout=base.timeout)

    @app.route('/', methods=['GET', 'POST'])
    def index():
        base = current_app.config['CHECK_CONFIG']
        results = None
        error = None
        raw_domains = ''
        insecure_checked = base.insecure
        utc_checked = base.utc

        if request.method == 'POST':
            raw_domains = request.form.get('domains', '')
            insecure_checked = _flag(request.form.get('insecure'))
            utc_checked = _flag(request.form.get('utc'))
            domains = _split_domains(raw_domains)
            logger.info(f"Web request: checking {domains} (insecure={insecure_checked}, utc={utc_checked})")
            try:
                results = current_app.config['CERT_CHECKER'].run(
                    domains, _request_config(insecure_checked, utc_checked))
            except ValidationError as e:
                error = str(e)

        accept_header = request.accept_mimetypes.best_match(['application/json', 'text/html'])
        if accept_header == 'application/json' and request.method == 'POST':
            if error:
                return jsonify({"error": error}), 400
            response = jsonify([record.to_dict() for record in results])
            response.mimetype = 'application/json; charset=utf-8'
            return response
        return render_template_string(HTML_TEMPLATE, results=results, error=error, domains=raw_domains,
                                      insecure_checked=insecure_checked, utc_checked=utc_checked)

    @app.route('/api/certs', methods=['GET'])
    def api_certs():
        domains = []
        for value in request.args.getlist('host'):
            domains.extend(_split_domains(value))
        config = _request_config(_flag(request.args.get('insecure')), _flag(request.args.get('utc')))
        try:
            results = current_app.config['CERT_CHECKER'].run(domains, config)
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        return jsonify([record.to_dict() for record in results])

    return app


def run_server(args):
    """
    Run the Flask web server for interactive certificate checks.
    """
    app = create_app(CheckConfig.from_args(args))
    logger.info(f"Starting Flask server on http://0.0.0.0:{args.port}")
    app.run(host='0.0.0.0', port=args.port, debug=False, threaded=True)


def get_flask_app():
    """Function to return the app instance, needed for WSGI servers like waitress."""
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("-k", "--insecure", action="store_true")
    parser.add_argument("-u", "--utc", action="store_true")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT)
    parser.add_argument("-l", "--loglevel", default="WARNING")

    server_args, _ = parser.parse_known_args()
    setup_logging(server_args.loglevel, fmt='%(asctime)s [%(levelname)-8s] %(name)s (Flask): %(message)s')
    return create_app(CheckConfig.from_args(server_args))
