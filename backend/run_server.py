"""
Server entry point for the pagefit API.
"""
import uvicorn


def main():
    import argparse
    parser = argparse.ArgumentParser()
    parser.add_argument('--host', default='127.0.0.1')
    parser.add_argument('--port', type=int, default=8000)
    parser.add_argument('--workers', type=int, default=1)
    args = parser.parse_args()

    uvicorn.run(
        'pagefit.main:app',
        host=args.host,
        port=args.port,
        workers=args.workers,
        log_level='info',
    )


if __name__ == '__main__':
    main()
