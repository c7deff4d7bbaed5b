from .main import main

if __name__ == "__main__":
    # Run the relay on HOST:PORT from settings
    main()
