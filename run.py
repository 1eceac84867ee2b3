import os

from healthapp import create_app

app = create_app()

if __name__ == '__main__':
    # Sólo para desarrollo local; en producción usar un servidor WSGI
    app.run(host='127.0.0.1', port=int(os.getenv('PORT', '5000')))
