#!/usr/bin/env python3
"""
Convenience script to run the EventSphere admin API
"""
from eventsphere.web.app import app
from eventsphere.database import setup_database

if __name__ == '__main__':
    # Create tables if they don't exist
    setup_database()

    # Run the app
    app.run(debug=True, host='0.0.0.0', port=5001)
