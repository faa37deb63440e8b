from countdown import create_app, socketio, start_services

app = create_app()

if __name__ == '__main__':
    start_services(app)
    app.logger.info(f"Serving viewer displays on http://localhost:{app.config['PORT']}")
    # Threaded Werkzeug server is enough for a handful of overlay clients
    socketio.run(app, host='0.0.0.0', port=app.config['PORT'], allow_unsafe_werkzeug=True)
