"""
Bookings - Hotel Room Reservation System
Flask application factory and initialization
"""

import os
import logging

import click
from flask import Flask, render_template, g
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Import configuration
from config import config

# Import extensions
from extensions import csrf, mailer

# Import database functions
from database import close_db, init_db

# Import booking core
from models import services
from models.exceptions import StorageUnavailable


def create_app(config_name=None, repository=None):
    """
    Application factory for Flask app.

    Args:
        config_name: Configuration name ('development', 'production', 'test')
        repository: Reservation repository to use instead of the configured one

    Returns:
        Flask application instance
    """
    # Determine config
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])

    # Initialize extensions
    initialize_extensions(app, repository)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_cli_commands(app)

    # Register context processors
    register_context_processors(app)

    # Register teardown handlers
    register_teardown_handlers(app)

    # Configure logging
    configure_logging(app)

    return app


def initialize_extensions(app, repository=None):
    """Initialize Flask extensions and the booking core."""
    # Initialize CSRF Protection
    csrf.init_app(app)
    # Initialize outgoing mail
    mailer.init_app(app)
    # Repository, availability engine and reservation writer
    services.init_app(app, repository)


def register_blueprints(app):
    """Register Flask blueprints."""
    # Import blueprints
    from blueprints.pages.routes import pages_bp
    from blueprints.booking.routes import booking_bp
    from blueprints.api.routes import api_bp

    # Register blueprints
    app.register_blueprint(pages_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(api_bp, url_prefix='/api')


def register_error_handlers(app):
    """Register error handlers."""

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 errors."""
        return render_template('errors/404.html'), 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        # Rollback database on error
        db = g.get('db')
        if db:
            db.rollback()
        return render_template('errors/500.html'), 500

    @app.errorhandler(StorageUnavailable)
    def storage_unavailable_error(error):
        """Handle persistence failures: log and show the generic error page."""
        app.logger.error(f'Storage unavailable: {error}')
        return render_template('errors/500.html'), 503


def register_cli_commands(app):
    """Register Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db_command():
        """Initialize database with schema and seed data."""
        click.echo('Initializing database...')
        with app.app_context():
            init_db()
        click.echo('Database initialized successfully!')

    @app.cli.command('block-room')
    @click.argument('room_id', type=int)
    @click.argument('start')
    @click.argument('end')
    def block_room_command(room_id, start, end):
        """Block a room from START to END (YYYY-MM-DD, end exclusive)."""
        from models.date_range import DateRange
        from models.exceptions import BookingError

        with app.app_context():
            repository = services.get_services().repository
            try:
                date_range = DateRange.parse(start, end)
                if repository.get_room_by_id(room_id) is None:
                    raise click.ClickException(f'Room {room_id} not found')
                with repository.transaction():
                    block_id = repository.insert_room_restriction(
                        room_id=room_id,
                        date_range=date_range,
                        restriction_id=app.config['OWNER_BLOCK_RESTRICTION_ID']
                    )
            except BookingError as e:
                raise click.ClickException(str(e))
            click.echo(f'Room {room_id} blocked for {date_range} (restriction {block_id})')

    @app.cli.command('list-reservations')
    @click.option('--new', 'only_new', is_flag=True, help='Only reservations not yet processed.')
    def list_reservations_command(only_new):
        """List reservations ordered by arrival date."""
        with app.app_context():
            repository = services.get_services().repository
            reservations = repository.all_reservations(processed=False if only_new else None)

        if not reservations:
            click.echo('No reservations.')
            return
        for r in reservations:
            status = 'processed' if r['processed'] else 'new'
            click.echo(
                f"{r['id']}\t{r['start_date']} -> {r['end_date']}\t{r['room_name']}\t"
                f"{r['first_name']} {r['last_name']} <{r['email']}>\t{status}"
            )

    @app.cli.command('process-reservation')
    @click.argument('reservation_id', type=int)
    @click.option('--undo', is_flag=True, help='Mark the reservation as new again.')
    def process_reservation_command(reservation_id, undo):
        """Mark a reservation as processed."""
        with app.app_context():
            repository = services.get_services().repository
            with repository.transaction():
                found = repository.set_processed(reservation_id, not undo)
        if not found:
            raise click.ClickException(f'Reservation {reservation_id} not found')
        click.echo(f'Reservation {reservation_id} marked {"new" if undo else "processed"}')

    @app.cli.command('delete-reservation')
    @click.argument('reservation_id', type=int)
    def delete_reservation_command(reservation_id):
        """Delete a reservation and free its room."""
        with app.app_context():
            repository = services.get_services().repository
            with repository.transaction():
                found = repository.delete_reservation(reservation_id)
        if not found:
            raise click.ClickException(f'Reservation {reservation_id} not found')
        app.logger.info(f'Reservation {reservation_id} deleted')
        click.echo(f'Reservation {reservation_id} deleted')


def register_context_processors(app):
    """Register template context processors."""

    @app.context_processor
    def utility_processor():
        """Inject utility values into templates."""
        from datetime import datetime

        return {
            'current_year': datetime.now().year,
            'app_name': app.config.get('APP_NAME', 'Bookings'),
            'app_version': app.config.get('APP_VERSION', '1.0.0')
        }

    # Add custom template filters
    @app.template_filter('format_date')
    def format_date_filter(date_str, format='%d/%m/%Y'):
        """Format date string."""
        from datetime import datetime
        if not date_str:
            return ''
        try:
            if isinstance(date_str, str):
                date_obj = datetime.strptime(date_str, '%Y-%m-%d')
            else:
                date_obj = date_str
            return date_obj.strftime(format)
        except (TypeError, ValueError):
            return date_str


def register_teardown_handlers(app):
    """Register teardown handlers."""

    @app.teardown_appcontext
    def teardown_db(error):
        """Close database connection at end of request."""
        close_db(error)


def configure_logging(app):
    """Configure application logging."""
    if not app.debug and not app.testing:
        # Production logging
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/bookings.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        # Booking core and mailer log through their module loggers
        for name in ('models', 'utils'):
            logging.getLogger(name).addHandler(file_handler)
            logging.getLogger(name).setLevel(logging.INFO)

        app.logger.setLevel(logging.INFO)
        app.logger.info('Bookings startup')
    else:
        # Development logging
        app.logger.setLevel(logging.DEBUG)


# Create application instance for development server
if __name__ == '__main__':
    app = create_app()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(host='0.0.0.0', debug=True)
