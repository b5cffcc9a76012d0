import eventlet
eventlet.monkey_patch()

# 2. Обычные импорты
import argparse
from checkers import create_app

print("[run.py] Eventlet monkey-patch применен.")

# 3. Создаем приложение
app, socketio = create_app()

if __name__ == '__main__':

    # 4. Настраиваем парсер аргументов
    parser = argparse.ArgumentParser(description='Запуск хоста пиров (Flask-SocketIO).')

    parser.add_argument(
        '-e', '--env',
        default='local',
        choices=['local', 'prod'],
        help='Режим запуска: local (для разработки) или prod (для боевого сервера). По умолчанию: local.'
    )

    args = parser.parse_args()

    if args.env == 'prod':
        print("[run.py] Запуск в режиме PRODUCTION (prod) на 0.0.0.0:5000...")

        socketio.run(app,
                     host='0.0.0.0',
                     port=5000,
                     debug=False
                    )

    else:
        print("[run.py] Запуск в режиме LOCAL (dev) на 127.0.0.1:4999...")

        socketio.run(app,
                     host='127.0.0.1',
                     port=4999,
                     debug=True,
                     allow_unsafe_werkzeug=True # Нужно для debug=True при использовании eventlet
                    )
